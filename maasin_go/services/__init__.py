"""
Сервисы приложения: реестр присутствия, тарифы, отзывы, профили, идентификация.
HTTP API собирается в maasin_go.services.app.
"""
