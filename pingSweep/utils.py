import shutil
import sys


def carry_around_add(a, b):
    """
    дополняющая сумма
    :param a: первое слагаемое
    :param b: второе слагаемое
    :return: дополняющая сумма a и b
    """
    c = a + b
    return (c & 0xFFFF) + (c >> 16)


def checksum(msg, length=None):
    """
    обратный код 16 битной дополняющей суммы елементов msg (RFC 1071)
    слова берутся в сетевом порядке байт,
    результат нужно упаковывать так же ('!H')
    :param msg: сообщение для подсчёта контрольной суммы
    :param length: кол-во байт, участвующих в подсчёте (None == все)
    :return: контрольная сумма
    """
    if length is None:
        length = len(msg)
    s = 0
    for i in range(1, length, 2):
        w = (int(msg[i - 1]) << 8) | int(msg[i])
        s = carry_around_add(s, w)
    if length % 2 == 1:
        s = carry_around_add(s, int(msg[length - 1]) << 8)
    while s >> 16:
        s = (s & 0xFFFF) + (s >> 16)
    return ~s & 0xFFFF


def verify_checksum(msg):
    """
    проверка сообщения, содержащего собственную контрольную сумму
    :param msg: сообщение
    :return: True, если сумма всех слов равна 0xFFFF
    """
    return checksum(msg) == 0


def print_progress_bar(iteration: int, total: int, prefix: str = '', suffix: str = '',
                       decimals: int = 1, length: int = None, fill: str = '█',
                       file=None) -> None:
    """
        вывод строки состояния для работы в цикле
        :param iteration: текущая итерация
        :param total: общее число итераций
        :param prefix: префикс
        :param suffix: суффикс
        :param decimals: кол-во знаков после запятой
        :param length: длина строки состояния
        :param fill: заполняющий символ
        :param file: поток вывода (None == sys.stderr)
    """
    if file is None:
        file = sys.stderr
    total = max(total, 1)
    percent = ("{0:." + str(decimals) + "f}").format(100 * (iteration / float(total)))
    if length is None:
        length = max(shutil.get_terminal_size()[0] - len(prefix) - len(suffix) - len(percent) - 5, 10)
    filled_length = int(length * iteration // total)
    bar = fill * filled_length + '-' * (length - filled_length)
    print('\r%s|%s| %s%% %s' % (prefix, bar, percent, suffix), end='\r', file=file)
    if iteration >= total:
        print(file=file)
