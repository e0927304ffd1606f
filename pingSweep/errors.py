"""
Исключения ping-sweep
"""


class PingSweepError(Exception):
    """
    Базовое исключение приложения
    """


class InterfaceError(PingSweepError):
    """
    Ошибка получения списка сетевых интерфейсов
    """


class InterfaceNotFoundError(InterfaceError):
    """
    Интерфейс с указанным именем не найден
    """

    def __init__(self, name, available=()):
        self.name = name
        self.available = list(available)
        super().__init__("интерфейс \"{}\" не найден".format(name))


class NoIPv4AddressError(InterfaceError):
    """
    У интерфейса нет IPv4 адреса
    """

    def __init__(self, name):
        self.name = name
        super().__init__("у интерфейса \"{}\" нет IPv4 адреса".format(name))


class ScanSetupError(PingSweepError):
    """
    Не удалось создать или настроить ICMP сокет
    """
