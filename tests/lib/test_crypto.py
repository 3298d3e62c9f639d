from hashlib import md5

import pytest

from avatar_privacy.lib.crypto import get_sub_dir, hash_identity, is_identity_hash


def test_hash_identity_normalized():
    assert hash_identity(' Foo@Bar.com ') == hash_identity('foo@bar.com')


def test_hash_identity_known_value():
    # md5 of the empty string
    assert hash_identity('') == 'd41d8cd98f00b204e9800998ecf8427e'
    assert hash_identity('  \t\n') == 'd41d8cd98f00b204e9800998ecf8427e'


def test_hash_identity_distinct():
    assert hash_identity('foo@bar.com') != hash_identity('foo@baz.com')


def test_hash_identity_non_ascii():
    assert hash_identity('Jürgen@Example.com') == md5('jürgen@example.com'.encode()).hexdigest()  # noqa: S324


def test_hash_identity_lone_surrogate():
    identity_hash = hash_identity('foo\ud800@bar.com')
    assert is_identity_hash(identity_hash)
    assert identity_hash == md5(b'foo\xed\xa0\x80@bar.com').hexdigest()  # noqa: S324
    assert identity_hash != hash_identity('foo@bar.com')


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('d41d8cd98f00b204e9800998ecf8427e', True),
        ('D41D8CD98F00B204E9800998ECF8427E', False),
        ('d41d8cd98f00b204e9800998ecf8427', False),
        ('d41d8cd98f00b204e9800998ecf8427ex', False),
        ('', False),
    ],
)
def test_is_identity_hash(value, expected):
    assert is_identity_hash(value) == expected


def test_get_sub_dir():
    assert get_sub_dir('d41d8cd98f00b204e9800998ecf8427e') == 'd/4'
