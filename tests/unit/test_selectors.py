import pytest
from pydantic import ValidationError

from patient_ui.core.errors import ConfigurationError
from patient_ui.selectors import Find, FieldRef, FindByLocatorStrategy, Selector, SelectorStrategy, to_playwright_selector


@pytest.mark.parametrize(
    "selector, expected",
    [
        (Selector.css("#login button"), "css=#login button"),
        (Selector.xpath("//button[@type='submit']"), "xpath=//button[@type='submit']"),
        (Selector.id("username"), "id=username"),
        (Selector.accessibility_id('Say "hi"'), '[aria-label="Say \\"hi\\""]'),
        (Selector.ui_path("role=button[name='OK'] >> nth=0"), "role=button[name='OK'] >> nth=0"),
        ("text=Sign in", "text=Sign in"),
    ],
)
def test_to_playwright_selector(selector, expected):
    assert to_playwright_selector(selector) == expected


def test_unsupported_selector_type():
    with pytest.raises(TypeError):
        to_playwright_selector(42)


def test_selector_value_is_trimmed_and_required():
    assert Selector.css("  .row ").value == ".row"
    with pytest.raises(ValidationError):
        Selector.css("   ")


def test_selector_str_and_defaults():
    assert str(Selector(value="a.b")) == "css:a.b"
    assert Selector(value="x", strategy="xpath").strategy is SelectorStrategy.xpath
    assert Selector.id("a") == Selector(value="a", strategy=SelectorStrategy.id)


def test_find_builds_selector():
    f = Find(accessibility_id="Close", timeout_ms=250)
    assert f.selector() == Selector.accessibility_id("Close")
    assert repr(f) == "Find(accessibility_id='Close', timeout_ms=250)"


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(),
        dict(css="a", id="b"),
        dict(css="a", timeout_ms=-1),
        dict(xpath="  "),
    ],
)
def test_find_rejects_bad_declarations(kwargs):
    with pytest.raises(ConfigurationError):
        Find(**kwargs).selector()


def test_find_by_strategy_applies_timeout(driver):
    class Page:
        plain = Find(css=".a")
        slow = Find(css=".b", timeout_ms=5)

    strategy = FindByLocatorStrategy()
    plain = strategy.build_locator(driver, [FieldRef(Page, "plain", Page.__dict__["plain"])])
    slow = strategy.build_locator(driver, [FieldRef(Page, "slow", Page.__dict__["slow"])])

    assert str(plain) == "driver.find(css:.a)"
    assert plain.timeout_ms == driver.config.present_timeout_ms
    assert slow.timeout_ms == 5
    assert strategy.build_locator(driver, [FieldRef(Page, "other")]) is None
    with pytest.raises(ValueError):
        strategy.build_locator(driver, [])
