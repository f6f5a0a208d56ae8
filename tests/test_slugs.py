import re

from toggle.slugs import generate, with_fallback


def test_generate_basic():
    assert generate("Hello World") == "hello-world"


def test_generate_is_url_safe():
    slug = generate("  Acme Corp & Friends!! ")
    assert slug.startswith("acme-corp-")
    assert slug.endswith("friends")
    assert set(slug) <= set("abcdefghijklmnopqrstuvwxyz0123456789-")
    assert "--" not in slug


def test_generate_idempotent():
    slug = generate("My Great Project")
    assert generate(slug) == slug


def test_with_fallback_shape():
    text = "My Tenant"
    result = with_fallback(text)
    prefix = generate(text) + "-"
    assert result.startswith(prefix)
    assert re.fullmatch(r"[0-9a-f]{8}", result[len(prefix):])


def test_with_fallback_is_unique():
    assert len({with_fallback("same") for _ in range(20)}) == 20