"""
Функции для работы с ICMP ECHO REQUEST/REPLY
"""
import logging
import socket
import struct
import time

from pingSweep import utils

log = logging.getLogger(__name__)

ICMP_ECHO_REPLY = 0
ICMP_ECHO_REQUEST = 8


def build_echo_request(icmp_id, sequence_num, data=b''):
    """
    Сборка ICMP ECHO REQUEST с контрольной суммой
    :param icmp_id: идентификатор
    :param sequence_num: номер сообщения (берутся младшие 16 бит)
    :param data: данные
    :return: пакет, готовый к отправке
    """
    # noinspection SpellCheckingInspection
    icmp_header = struct.pack('!BBHHH', ICMP_ECHO_REQUEST, 0,
                              0, icmp_id & 0xFFFF, sequence_num & 0xFFFF)
    msg = icmp_header + data
    return msg[:2] + struct.pack('!H', utils.checksum(msg)) + msg[4:]


def parse_echo_message(msg):
    """
    Разбор полученного ICMP сообщения
    raw сокет (и datagram сокет на некоторых системах) отдаёт сообщение
    вместе с IP заголовком, в этом случае он отбрасывается
    :param msg: полученные байты
    :return: кортеж (type, code, icmp id, sequence number, data)
             или None, если сообщение повреждено
    """
    msg = memoryview(msg)
    if len(msg) >= 20 and msg[0] >> 4 == 4:
        msg = msg[(msg[0] & 0xF) * 4:]
    if len(msg) < 8 or not utils.verify_checksum(msg):
        return None
    icmp_type, icmp_code, _, icmp_id, seq_num = \
        struct.unpack("!BBHHH", msg[:8].tobytes())
    return icmp_type, icmp_code, icmp_id, seq_num, msg[8:]


def send_echo_request(sock, ip, icmp_id, sequence_num, data=b'', port=0):
    """
    Посылка ICMP ECHO REQUEST
    :param sock: сокет для отправки сообщения
    :param ip: адресат
    :param icmp_id: идентификатор
    :param sequence_num: номер сообщения
    :param data: данные
    :param port: порт адресата (для ICMP не используется)
    """
    sock.sendto(build_echo_request(icmp_id, sequence_num, data), (ip, port))


def receive_echo_reply(sock, source_address=None, pref_id=None,
                       pref_seq_num=None, timeout=0):
    """
    Получение ICMP ECHO REPLY
    все посторонние ответы, пришедшие до истечения времени, отбрасываются
    :param sock: сокет для приёма сообщения
    :param source_address: ожидаемый адрес отправителя
    :param pref_id: ожидаемый идетификатор отправителя
    :param pref_seq_num: ожидаемый номер сообщения
    :param timeout: время ожидания сообщения (None == без ограничения)
    :return: кортеж информации о полученном сообщении
                (ip, icmp id, sequence number, data)
    """
    if timeout is not None:
        start = time.monotonic()
    sock_timeout = timeout
    while timeout is None or sock_timeout > 0:
        try:
            sock.settimeout(sock_timeout)
            msg, address = sock.recvfrom(65535)
            reply = parse_echo_message(msg)
            if reply is not None:
                icmp_type, icmp_code, icmp_id, seq_num, data = reply
                if (icmp_type == ICMP_ECHO_REPLY and icmp_code == 0
                        and (source_address is None or address[0] == source_address)
                        and (pref_id is None or icmp_id == pref_id)
                        and (pref_seq_num is None or seq_num == pref_seq_num)):
                    return address[0], icmp_id, seq_num, data
                log.debug("Пропущен посторонний пакет: ip: %s; type: %d; id: %d; seq_num: %d",
                          address[0], icmp_type, icmp_id, seq_num)
        except socket.timeout:
            pass
        if timeout is not None:
            sock_timeout = start - time.monotonic() + timeout
    raise socket.timeout


def probe(sock, sequence_num, ip, icmp_id=0, port=0, timeout=None):
    """
    Проверка доступности адреса одним ECHO REQUEST
    любые ошибки отправки/приёма и истечение времени считаются отсутствием ответа
    :param sock: настроенный ICMP сокет
    :param sequence_num: номер сообщения
    :param ip: адресат
    :param icmp_id: идентификатор
    :param port: порт адресата
    :param timeout: время ожидания ответа (None == таймаут сокета)
    :return: True, если получен ответ, False иначе
    """
    sock_timeout = sock.gettimeout()
    if timeout is None:
        timeout = sock_timeout
    # datagram ICMP сокет подменяет идентификатор сам и фильтрует чужие ответы
    pref_id = icmp_id & 0xFFFF if sock.type == socket.SOCK_RAW else None
    try:
        send_echo_request(sock, ip, icmp_id, sequence_num, port=port)
        receive_echo_reply(sock, ip, pref_id, sequence_num & 0xFFFF, timeout)
        return True
    except socket.timeout:
        log.debug("Нет ответа: ip: %s; seq_num: %d", ip, sequence_num & 0xFFFF)
        return False
    except OSError as e:
        log.debug("Ошибка при проверке адреса %s: %s", ip, e)
        return False
    finally:
        sock.settimeout(sock_timeout)
