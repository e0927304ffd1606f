"""
                                   ping-sweep
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
     Приложение для поиска узлов подсети с помощью ICMP ECHO REQUEST/REPLY
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Диапазон сканирования определяется адресом и маской интерфейса:
    base            : address & mask        ==  адрес сети
    range           : 0xFFFFFFFF - mask     ==  наибольшее смещение от base
    проверяются все адреса base + 0 ... base + range, включая адрес сети
    и широковещательный адрес
Формат ICMP Echo Request:
    ICMP            : 8 bytes
        type                : 1 byte            ==  8
        code                : 1 byte            ==  0
        checksum            : 2 bytes           ==  16 битный обратный код
                                                    дополняющей суммы всех
                                                    16 битных слов
                                                    начиная с поля type.
        ECHO part of header : 4 bytes
            identifier              : 2 bytes   ==  0 (datagram сокет
                                                    подставляет свой)
            sequence number         : 2 bytes   ==  смещение адреса от base
                                                    (младшие 16 бит)
Ответ засчитывается, если пришёл ICMP Echo Reply от проверяемого адреса
с тем же sequence number (и identifier для raw сокета) до истечения
времени ожидания.
"""
import pingSweep.errors
import pingSweep.icmp
import pingSweep.interfaces
import pingSweep.scanner
import pingSweep.utils
