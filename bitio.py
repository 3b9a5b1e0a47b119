"""
Побитовое чтение и запись поверх бинарных файловых объектов.
Биты упаковываются в байт начиная со старшего.
"""

from typing import BinaryIO


class BitInputStream:
    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.start = stream.tell()
        self.buffer = 0
        self.buffered = 0
        self.bits_read = 0

    def read_bits(self, count: int) -> int:
        """Читает count бит как беззнаковое число, -1 если бит не хватает"""
        while self.buffered < count:
            byte = self.stream.read(1)
            if not byte:
                return -1
            self.buffer = (self.buffer << 8) | byte[0]
            self.buffered += 8

        self.buffered -= count
        value = (self.buffer >> self.buffered) & ((1 << count) - 1)
        self.buffer &= (1 << self.buffered) - 1
        self.bits_read += count
        return value

    def reset(self):
        self.stream.seek(self.start)
        self.buffer = 0
        self.buffered = 0
        self.bits_read = 0


class BitOutputStream:
    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.acc = 0
        self.bits = 0
        self.bits_written = 0

    def write_bits(self, count: int, value: int):
        for i in range(count - 1, -1, -1):
            self.acc = (self.acc << 1) | ((value >> i) & 1)
            self.bits += 1
            if self.bits == 8:
                self.stream.write(bytes([self.acc]))
                self.acc = 0
                self.bits = 0
        self.bits_written += count

    def flush(self):
        if self.bits > 0:
            self.stream.write(bytes([self.acc << (8 - self.bits)]))
            self.acc = 0
            self.bits = 0
        self.stream.flush()
