"""
Общие модели, разделяемые сервисами и клиентом.
"""
