"""
Сканирование подсети интерфейса с помощью ICMP ECHO REQUEST
"""
import logging
import queue
import socket
import struct
import sys
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait

from pingSweep import icmp
from pingSweep import utils
from pingSweep.errors import ScanSetupError

log = logging.getLogger(__name__)


def ip_to_int(ip):
    """
    :param ip: IPv4 адрес в виде строки
    :return: адрес в порядке байт хоста
    """
    return struct.unpack('!I', socket.inet_aton(ip))[0]


def int_to_ip(value):
    """
    :param value: адрес в порядке байт хоста
    :return: IPv4 адрес в виде строки
    """
    return socket.inet_ntoa(struct.pack('!I', value & 0xFFFFFFFF))


class ScanConfig:
    """
    Параметры сканирования
    """

    def __init__(self, ttl=64, timeout=0.25, port=0, identifier=0,
                 workers=1, raw=False, progress=False):
        """
        :type ttl: int
        :type timeout: float
        :type port: int
        :type identifier: int
        :type workers: int
        :type raw: bool
        :type progress: bool
        :param ttl: время жизни пакета
        :param timeout: время ожидания ответа на каждый запрос в секундах
        :param port: порт адресата (для ICMP не используется)
        :param identifier: идентификатор ECHO REQUEST
        :param workers: кол-во одновременных запросов
        :param raw: использовать raw сокет вместо datagram ICMP сокета
        :param progress: выводить строку состояния
        """
        self.ttl = ttl
        self.timeout = timeout
        self.port = port
        self.identifier = identifier
        self.workers = workers
        self.raw = raw
        self.progress = progress


class AddressRange:
    """
    Диапазон адресов подсети, включая адрес сети и широковещательный адрес
    """

    def __init__(self, base, host_range):
        """
        :type base: int
        :type host_range: int
        :param base: первый адрес диапазона в порядке байт хоста
        :param host_range: наибольшее смещение от base
        """
        self.base = base
        self.host_range = host_range

    @classmethod
    def from_interface(cls, address, netmask):
        """
        :param address: IPv4 адрес интерфейса
        :param netmask: маска подсети
        :return: диапазон base = address & mask, range = 0xFFFFFFFF - mask
        """
        mask = ip_to_int(netmask)
        return cls(ip_to_int(address) & mask, 0xFFFFFFFF - mask)

    def __len__(self):
        return self.host_range + 1

    def __getitem__(self, offset):
        if offset < 0:
            offset += len(self)
        if not 0 <= offset <= self.host_range:
            raise IndexError(offset)
        return int_to_ip(self.base + offset)

    def __iter__(self):
        for _, ip in self.items():
            yield ip

    def items(self, start=0):
        """
        перебор адресов по возрастанию
        :param start: начальное смещение
        :return: генератор пар (смещение, адрес)
        """
        for offset in range(start, self.host_range + 1):
            yield offset, int_to_ip(self.base + offset)


class Scanner:
    """
    Поиск узлов подсети, отвечающих на ICMP ECHO REQUEST
    """

    def __init__(self, config=None, out=None):
        """
        :type config: ScanConfig
        :param config: параметры сканирования
        :param out: поток для вывода результатов (None == sys.stdout)
        """
        self.config = config if config is not None else ScanConfig()
        self.out = out

    def write(self, line=""):
        print(line, file=self.out if self.out is not None else sys.stdout, flush=True)

    def open_socket(self):
        """
        создание и настройка ICMP сокета
        :return: сокет
        """
        sock_type = socket.SOCK_RAW if self.config.raw else socket.SOCK_DGRAM
        try:
            sock = socket.socket(socket.AF_INET, sock_type, socket.IPPROTO_ICMP)
        except OSError as e:
            raise ScanSetupError("не удалось создать ICMP сокет: {}".format(e.strerror or e)) from e
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, self.config.ttl)
        except OSError as e:
            sock.close()
            raise ScanSetupError("не удалось установить TTL: {}".format(e.strerror or e)) from e
        try:
            sock.settimeout(self.config.timeout)
        except (OSError, ValueError) as e:
            sock.close()
            raise ScanSetupError("не удалось установить время ожидания: {}".format(e)) from e
        return sock

    def print_header(self, interface):
        self.write("Interface:      {}".format(interface.name))
        self.write("IPv4 Address:   {}".format(interface.address))
        self.write("IP Subnet Mask: {}".format(interface.netmask))
        self.write()

    def scan(self, interface):
        """
        сканирование подсети интерфейса
        :type interface: pingSweep.interfaces.InterfaceInfo
        :param interface: интерфейс
        :return: список ответивших адресов
        """
        addresses = AddressRange.from_interface(interface.address, interface.netmask)
        log.info("Сканирование %s: %s - %s; адресов: %d; потоков: %d",
                 interface.name, addresses[0], addresses[-1],
                 len(addresses), self.config.workers)
        if self.config.workers > 1:
            found = self.sweep_pooled(interface, addresses)
        else:
            found = self.sweep(interface, addresses)
        log.info("Сканирование завершено; найдено узлов: %d", len(found))
        return found

    def sweep(self, interface, addresses):
        """
        последовательная проверка адресов по возрастанию
        """
        found = []
        total = len(addresses)
        with self.open_socket() as sock:
            self.print_header(interface)
            for offset, ip in addresses.items():
                if self.config.progress:
                    utils.print_progress_bar(offset, total)
                if icmp.probe(sock, offset, ip, self.config.identifier, self.config.port):
                    self.write(ip)
                    found.append(ip)
            if self.config.progress:
                utils.print_progress_bar(total, total)
        return found

    def sweep_pooled(self, interface, addresses):
        """
        проверка адресов несколькими потоками
        у каждого потока свой сокет, адреса выводятся в порядке получения ответов
        """
        workers = self.config.workers
        sockets = queue.Queue()
        opened = []
        try:
            for index in range(workers):
                sock = self.open_socket()
                opened.append(sock)
                sockets.put((self.config.identifier + index, sock))
            self.print_header(interface)
            found = []
            pending = set()
            with ThreadPoolExecutor(max_workers=workers) as executor:
                for offset, ip in addresses.items():
                    if len(pending) >= workers * 2:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        self._collect(done, found)
                    pending.add(executor.submit(self._probe_pooled, sockets, offset, ip))
                done, _ = wait(pending)
                self._collect(done, found)
            return found
        finally:
            for sock in opened:
                sock.close()

    def _probe_pooled(self, sockets, offset, ip):
        icmp_id, sock = sockets.get()
        try:
            return ip, icmp.probe(sock, offset, ip, icmp_id, self.config.port)
        finally:
            sockets.put((icmp_id, sock))

    def _collect(self, done, found):
        for future in done:
            ip, alive = future.result()
            if alive:
                self.write(ip)
                found.append(ip)
