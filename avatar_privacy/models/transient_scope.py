from enum import StrEnum


class TransientScope(StrEnum):
    site = 'site'
    network = 'network'
