from typing import NewType

IdentityHash = NewType('IdentityHash', str)
IconType = NewType('IconType', str)
StorageKey = NewType('StorageKey', str)

# Content-type string when the remote image exists, 0 when it does not
ValidationResult = str | int
