import pytest

from avatar_privacy.default_icons.icon_provider_registry import IconProviderRegistry
from avatar_privacy.default_icons.static_icon_provider import StaticIconProvider


def _provider(types: tuple[str, ...], name: str) -> StaticIconProvider:
    return StaticIconProvider(types, name, f'{name}.svg', base_url='https://example.com')


def test_get():
    mystery = _provider(('mystery', 'mm'), 'mystery')
    registry = IconProviderRegistry((mystery,))
    assert registry.get('mystery') is mystery
    assert registry.get('mm') is mystery
    assert registry.get('monsterid') is None


def test_first_registration_wins():
    first = _provider(('shared', 'first'), 'first')
    second = _provider(('second', 'shared'), 'second')
    registry = IconProviderRegistry((first, second))
    assert registry.get('shared') is first
    assert registry.get('second') is second
    assert registry.types == ('shared', 'first', 'second')


def test_avatar_defaults():
    registry = IconProviderRegistry((
        _provider(('mystery', 'mm'), 'Mystery'),
        _provider(('geometric',), 'Geometric'),
    ))
    assert registry.avatar_defaults() == {'mystery': 'Mystery', 'geometric': 'Geometric'}


def test_provider_without_types():
    with pytest.raises(ValueError):
        _provider((), 'empty')


async def test_static_icon_url():
    provider = _provider(('mystery',), 'mystery')
    assert provider.option_value == 'mystery'
    assert await provider.get_icon_url('d41d8cd98f00b204e9800998ecf8427e', 80) == 'https://example.com/mystery.svg'  # pyright: ignore[reportArgumentType]
