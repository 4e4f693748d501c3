"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """Роли пользователей (фиксируются при регистрации)."""
    PASSENGER = "passenger"
    DRIVER = "driver"

    def __str__(self) -> str:
        return self.value


class DriverStatus(str, Enum):
    """Статусы водителя."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    OFFLINE = "offline"

    def __str__(self) -> str:
        return self.value


class VehicleType(str, Enum):
    """Типы транспорта."""
    TRICYCLE = "tricycle"
    MULTICAB = "multicab"

    def __str__(self) -> str:
        return self.value


class VehicleFilter(str, Enum):
    """Фильтр снимка водителей по типу транспорта."""
    ALL = "all"
    TRICYCLE = "tricycle"
    MULTICAB = "multicab"

    def __str__(self) -> str:
        return self.value


# Префиксы ключей в хранилище
DRIVER_KEY_PREFIX = "driver:"
USER_KEY_PREFIX = "user:"
FEEDBACK_KEY_PREFIX = "feedback:"
FARES_KEY_PREFIX = "fares:"
ACCOUNT_KEY_PREFIX = "auth:account:"
