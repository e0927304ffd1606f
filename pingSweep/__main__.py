#!/usr/bin/env python3
import argparse
import logging
import sys

from pingSweep import interfaces
from pingSweep.errors import (InterfaceError, InterfaceNotFoundError,
                              NoIPv4AddressError, ScanSetupError)
from pingSweep.scanner import ScanConfig, Scanner

log = logging.getLogger("pingSweep")


def positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("ожидается положительное число: {}".format(value))
    return number


def get_parser() -> argparse.ArgumentParser:
    """
    генерация парсера аргументов командной строки
    :return: сгенерированный парсер
    """
    parser = argparse.ArgumentParser(
        prog="ping-sweep",
        description="Поиск узлов подсети интерфейса с помощью ICMP ECHO REQUEST")
    parser.add_argument("interface", help="Имя сетевого интерфейса")
    parser.add_argument("--log_file", "-l", dest="log_file", type=argparse.FileType("a"),
                        default=sys.stderr, help="Путь до файла для логов")

    log_level = parser.add_mutually_exclusive_group()
    log_level.set_defaults(log_level=logging.INFO)
    log_level.add_argument("--error", "-e", dest="log_level",
                           action="store_const", const=logging.ERROR,
                           help="Ограничить логирование ошибками")
    log_level.add_argument("--info", "-i", dest="log_level",
                           action="store_const", const=logging.INFO,
                           help="Ограничить логирование информацией")
    log_level.add_argument("--debug", "-d", dest="log_level",
                           action="store_const", const=logging.DEBUG,
                           help="Ограничить логирование сообщениями для дебага")

    parser.add_argument("--ttl", "-t", type=positive_int, default=64,
                        help="Время жизни пакета")
    parser.add_argument("--timeout", "-w", type=positive_int, default=250,
                        help="Время ожидания ответа в миллисекундах")
    parser.add_argument("--workers", "-j", type=positive_int, default=1,
                        help="Кол-во одновременных запросов")
    parser.add_argument("--raw", "-r", action="store_const", const=True, default=False,
                        help="Использовать raw сокет (нужны права root)")
    parser.add_argument("--progress", "-p", action="store_const", const=True, default=False,
                        help="Выводить строку состояния")
    return parser


def main(argv=None):
    """
    точка входа
    :param argv: аргументы командной строки (None == sys.argv[1:])
    :return: код завершения
    """
    args = get_parser().parse_args(argv)
    logging.basicConfig(format="%(levelname)-8s [%(asctime)-15s; %(name)s]: %(message)s",
                        level=args.log_level, stream=args.log_file)

    config = ScanConfig(ttl=args.ttl, timeout=args.timeout / 1000,
                        workers=args.workers, raw=args.raw, progress=args.progress)
    try:
        interface = interfaces.find_interface(args.interface)
    except InterfaceNotFoundError as e:
        log.error("%s; доступные интерфейсы: %s", e, ", ".join(e.available) or "нет")
        return 2
    except NoIPv4AddressError as e:
        log.error("%s", e)
        return 2
    except InterfaceError as e:
        log.error("%s", e)
        return 1

    try:
        Scanner(config).scan(interface)
    except ScanSetupError as e:
        log.error("%s", e)
        return 1
    except KeyboardInterrupt:
        log.info("Сканирование прервано")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
