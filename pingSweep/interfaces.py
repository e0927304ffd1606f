"""
Поиск сетевого интерфейса по имени
"""
import logging
import socket

import psutil

from pingSweep.errors import InterfaceError, InterfaceNotFoundError, NoIPv4AddressError

log = logging.getLogger(__name__)


class InterfaceInfo:
    """
    IPv4 параметры сетевого интерфейса
    """

    def __init__(self, name, address, netmask):
        """
        :type name: str
        :type address: str
        :type netmask: str
        :param name: имя интерфейса
        :param address: IPv4 адрес интерфейса
        :param netmask: маска подсети
        """
        self.name = name
        self.address = address
        self.netmask = netmask

    def __eq__(self, other):
        return (isinstance(other, InterfaceInfo)
                and self.name == other.name
                and self.address == other.address
                and self.netmask == other.netmask)

    def __repr__(self):
        return "InterfaceInfo({!r}, {!r}, {!r})".format(self.name, self.address, self.netmask)


def _if_addrs():
    try:
        return psutil.net_if_addrs()
    except (OSError, psutil.Error) as e:
        raise InterfaceError("не удалось получить список интерфейсов: {}".format(e)) from e


def _ipv4_names(all_addrs):
    return sorted(name for name, addrs in all_addrs.items()
                  if any(addr.family == socket.AF_INET for addr in addrs))


def list_interfaces():
    """
    Имена интерфейсов, у которых есть IPv4 адрес
    :return: отсортированный список имён
    """
    return _ipv4_names(_if_addrs())


def find_interface(name):
    """
    Поиск интерфейса по имени
    используется первый IPv4 адрес интерфейса
    :type name: str
    :param name: имя интерфейса
    :return: InterfaceInfo
    """
    all_addrs = _if_addrs()
    if name not in all_addrs:
        raise InterfaceNotFoundError(name, _ipv4_names(all_addrs))
    for addr in all_addrs[name]:
        if addr.family == socket.AF_INET and addr.address and addr.netmask:
            log.debug("Найден интерфейс: %s; адрес: %s; маска: %s",
                      name, addr.address, addr.netmask)
            return InterfaceInfo(name, addr.address, addr.netmask)
    raise NoIPv4AddressError(name)
