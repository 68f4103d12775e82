import pytest

from fakes import FakeHandle
from patient_ui.core.cache import CacheState, RetryingExecutor
from patient_ui.core.driver import PatientDriver
from patient_ui.core.errors import ElementNotFoundError, StaleHandleError
from patient_ui.selectors.locator import Selector

BUTTON = Selector.id("submit")
KEY = str(BUTTON)


def test_is_present_always_looks_again(driver, session):
    session.elements[KEY] = [FakeHandle("submit")]
    element = driver.find(BUTTON).get()

    assert element.is_present() is True
    assert element.cache_state is CacheState.CACHED
    assert element.is_present() is True
    assert session.lookups[KEY] == 2

    # the cached handle is reused by actions
    element.click()
    assert session.lookups[KEY] == 2


def test_is_present_false_leaves_cache_empty(driver, session):
    handle = FakeHandle("submit")
    session.elements[KEY] = [handle]
    element = driver.find(BUTTON).get()
    element.click()
    assert element.cache_state is CacheState.CACHED

    session.elements[KEY] = []
    assert element.is_present(0) is False
    assert element.cache_state is CacheState.EMPTY
    assert element.with_wrapped_handle().peek() is None


def test_is_absent_success_clears_cache(driver, session):
    session.queue(BUTTON, [FakeHandle("submit")], [])
    element = driver.find(BUTTON).get()
    assert element.is_absent() is True
    assert element.cache_state is CacheState.EMPTY


def test_is_absent_timeout_recaches_last_handle(driver, session, config, clock):
    handle = FakeHandle("submit")
    session.elements[KEY] = [handle]
    element = driver.find(BUTTON).get()

    assert element.is_absent() is False
    assert sum(clock.sleeps) == config.not_present_timeout_ms
    assert element.cache_state is CacheState.CACHED
    assert element.with_wrapped_handle().peek() is handle

    lookups = session.lookups[KEY]
    element.click()
    assert session.lookups[KEY] == lookups
    assert handle.clicks == 1


def test_stale_handle_is_re_resolved(driver, session):
    old, new = FakeHandle("old"), FakeHandle("new")
    old.stale = True
    session.queue(BUTTON, [old], [new])

    driver.find(BUTTON).get().click()
    assert new.clicks == 1
    assert session.lookups[KEY] == 2


def test_gives_up_after_max_attempts(driver, session, config):
    handle = FakeHandle("submit")
    handle.stale = True
    session.elements[KEY] = [handle]

    with pytest.raises(StaleHandleError):
        driver.find(BUTTON).get().click()
    # one resolution per attempt
    assert session.lookups[KEY] == config.max_action_attempts == 3


def test_ignored_action_exceptions_are_retried(driver, session, config):
    handle = FakeHandle("submit")
    handle.click_error = ValueError("element is covered")
    session.elements[KEY] = [handle]
    tolerant = config.with_overrides(ignored_action_exceptions=frozenset({ValueError}), max_action_attempts=2)

    with pytest.raises(ValueError):
        driver.find(BUTTON).clone().get().click()
    assert session.lookups[KEY] == 1

    patient = PatientDriver(lambda: session, config=tolerant)
    with pytest.raises(ValueError):
        patient.find(BUTTON).get().click()
    assert session.lookups[KEY] == 1 + 2


def test_not_found_is_not_retried(driver, session):
    element = driver.find(BUTTON).get(0, 0)
    with pytest.raises(ElementNotFoundError):
        element.click()
    assert session.lookups[KEY] == 1


def test_convenience_actions(driver, session):
    handle = FakeHandle("Submit", type="submit")
    session.elements[KEY] = [handle]
    element = driver.find(BUTTON).get()

    element.fill("hello")
    assert handle.filled == ["hello"]
    assert element.text() == "Submit"
    assert element.is_displayed() is True
    assert element.get_attribute("type") == "submit"
    assert element.get_attribute("missing") is None
    assert element.apply(lambda h: h.name.lower()) == "submit"


def test_invalidate_forces_new_lookup(driver, session):
    session.elements[KEY] = [FakeHandle("submit")]
    element = driver.find(BUTTON).get()
    element.text()
    element.invalidate()
    assert element.cache_state is CacheState.INVALIDATED
    element.text()
    assert session.lookups[KEY] == 2
    assert isinstance(element.with_wrapped_handle(), RetryingExecutor)


def test_find_searches_inside_element(driver, session):
    cell = Selector.css("td")
    row = FakeHandle("row", children={str(cell): [FakeHandle("c1"), FakeHandle("c2")]})
    session.elements[KEY] = [row]

    cells = driver.find(BUTTON).get().find(cell)
    assert str(cells) == "driver.find(id:submit).get().find(css:td)"
    assert [c.text() for c in cells.get_all()] == ["c1", "c2"]
    assert cells.get(1).text() == "c2"


def test_find_recovers_when_parent_goes_stale(driver, session):
    cell = Selector.css("td")
    old_row = FakeHandle("row", children={str(cell): [FakeHandle("old cell")]})
    new_row = FakeHandle("row", children={str(cell): [FakeHandle("new cell")]})
    session.queue(BUTTON, [old_row], [new_row])

    parent = driver.find(BUTTON).get()
    parent.text()
    old_row.stale = True

    assert parent.find(cell).get().text() == "new cell"


def test_children_of_a_missing_parent_are_not_present(driver, session, clock):
    cells = driver.find(BUTTON).get().find(Selector.css("td"))

    assert cells.is_not_present(0) is True
    assert cells.is_present(0) is False
    assert cells.get_all(0) == []
    assert clock.sleeps == []


def test_child_timeout_is_its_own(driver, session, clock):
    cells = driver.find(BUTTON).get().find(Selector.css("td")).with_timeout(200)
    with pytest.raises(ElementNotFoundError):
        cells.get().text()
    # the parent is looked up once per child poll, never waited for on its own
    assert sum(clock.sleeps) == 200
    assert session.lookups[KEY] == 3


def test_children_appear_once_the_parent_does(driver, session):
    cell = Selector.css("td")
    row = FakeHandle("row", children={str(cell): [FakeHandle("c1")]})
    session.queue(BUTTON, [], [row])

    parent = driver.find(BUTTON).get()
    assert parent.find(cell).get().text() == "c1"
    assert parent.cache_state is CacheState.CACHED


def test_stale_parent_is_dropped_during_child_lookup(driver, session):
    cell = Selector.css("td")
    row = FakeHandle("row", children={str(cell): [FakeHandle("c1")]})
    session.elements[KEY] = [row]
    parent = driver.find(BUTTON).get()
    parent.text()

    row.stale = True
    session.elements[KEY] = []
    assert parent.find(cell).is_not_present(0) is True
    assert parent.cache_state is CacheState.INVALIDATED


def test_parent_lookup_errors_propagate_unless_ignored(driver, session, config):
    cell = Selector.css("td")
    session.errors = [RuntimeError("driver crashed")]
    with pytest.raises(RuntimeError):
        driver.find(BUTTON).get().find(cell).get_all(0)

    tolerant = PatientDriver(
        lambda: session,
        config=config.with_overrides(ignored_lookup_exceptions=frozenset({ConnectionError})),
    )
    session.errors = [ConnectionError("blip")]
    assert tolerant.find(BUTTON).get().find(cell).get_all(0) == []
