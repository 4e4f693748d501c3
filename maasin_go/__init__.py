"""
Maasin Go: бэкенд городского сервиса трициклов и мультикэбов.
"""

__version__ = "1.0.0"
