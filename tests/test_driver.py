#!/usr/bin/env python3
"""
Unit Test: LoRa6100 Driver

Tests the settings mode state machine, command exchanges and error
reporting against an emulated module.
Can run locally without the LoRa6100 module.
"""

import sys
import os
import time

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from lora6100 import (
    LoRa6100, DriverState, RetStatus, SerialBaudRate, NotOpenError,
    MalformedLineError, FramingError, BadReturnStatusError, TransportError
)
from fake_device import FakeLoRa6100


def make_driver(fake: FakeLoRa6100 = None, open_device: bool = True):
    fake = fake or FakeLoRa6100()
    driver = LoRa6100(fake, settings_in_delay=0.0, settings_out_delay=0.0)
    if open_device:
        driver.open()
    return driver, fake


def test_open_forces_normal_mode():
    """Test open resets buffers and releases SET once"""
    print("Testing open...")

    driver, fake = make_driver()

    assert driver.is_open
    assert driver.state == DriverState.NORMAL
    assert fake.buffer_resets == 1, "Buffers should be cleared on open"
    assert fake.rts_changes == [False], f"Unexpected RTS changes: {fake.rts_changes}"

    print("  ✓ Open cleared buffers and released SET")


def test_settings_mode_idempotent():
    """Test enable/disable only toggle RTS once each"""
    print("\nTesting settings mode idempotence...")

    driver, fake = make_driver()
    fake.rts_changes.clear()

    driver.enable_settings()
    driver.enable_settings()
    assert fake.rts_changes == [True]
    assert driver.state == DriverState.SETTINGS

    driver.disable_settings()
    driver.disable_settings()
    assert fake.rts_changes == [True, False]
    assert driver.state == DriverState.NORMAL

    print("  ✓ One assertion, one release")


def test_settings_mode_delays():
    """Test settle delays are honoured and skipped when idempotent"""
    print("\nTesting settle delays...")

    fake = FakeLoRa6100()
    driver = LoRa6100(fake, settings_in_delay=0.02, settings_out_delay=0.05)
    driver.open()

    start = time.monotonic()
    driver.enable_settings()
    assert time.monotonic() - start >= 0.02

    start = time.monotonic()
    driver.enable_settings()
    assert time.monotonic() - start < 0.02, "Second enable should not wait"

    start = time.monotonic()
    driver.disable_settings()
    assert time.monotonic() - start >= 0.07, "Disable waits in + out delays"

    print("  ✓ 20ms entry, 20ms + 50ms exit")


def test_get_version():
    """Test version exchange and wire framing"""
    print("\nTesting get_version...")

    driver, fake = make_driver()
    fake.rts_changes.clear()

    assert driver.get_version() == "LoRa6100 AES V1.0"
    assert fake.commands == [b"\xAA\xFA\xAA\r\n"]
    assert fake.rts_changes == [True, False], "Command wrapped in settings mode"
    assert driver.state == DriverState.NORMAL

    print("  ✓ Version read")


def test_get_parameters():
    """Test parameter read"""
    print("\nTesting get_parameters...")

    driver, fake = make_driver()
    params = driver.get_parameters()

    assert params == fake.parameters
    assert fake.commands == [b"\xAA\xFA\x01\r\n"]

    print(f"  ✓ {params}")


def test_set_then_get_parameters():
    """Test changing RF data rate from 3 to 5"""
    print("\nTesting set_parameters scenario...")

    driver, fake = make_driver()

    params = driver.get_parameters()
    assert params.rf_data_rate == 3
    params.rf_data_rate = 5

    status = driver.set_parameters(params)
    assert status == RetStatus.OK
    assert fake.commands[-1] == b"\xAA\xFA\x03" + params.serialize() + b"\r\n"

    assert driver.get_parameters().rf_data_rate == 5

    print("  ✓ RF data rate 3 -> 5 confirmed")


def test_reset_parameters():
    """Test factory reset"""
    print("\nTesting reset_parameters...")

    driver, fake = make_driver()
    params = driver.get_parameters()
    params.tx_power = 1
    driver.set_parameters(params)

    assert driver.reset_parameters() == RetStatus.OK
    assert fake.commands[-1] == b"\xAA\xFA\x02\r\n"
    assert driver.get_parameters().tx_power == 7

    print("  ✓ Defaults restored")


def test_invalid_parameters_not_sent():
    """Test out of range parameters fail before settings mode"""
    print("\nTesting invalid parameters...")

    driver, fake = make_driver()
    fake.rts_changes.clear()

    params = driver.get_parameters()
    params.rf_data_rate = 12
    params.tx_power = 9
    fake.rts_changes.clear()
    commands = list(fake.commands)

    try:
        driver.set_parameters(params)
        assert False, "Expected ValueError"
    except ValueError:
        pass
    assert fake.commands == commands, "Nothing should be written"
    assert fake.rts_changes == [], "Settings mode should not be entered"
    assert fake.parameters.rf_data_rate == 3

    print("  ✓ ValueError raised, module untouched")


def test_device_reported_error():

    """Test ERROR status is returned, not raised"""
    print("\nTesting device reported ERROR...")

    driver, fake = make_driver()
    fake.next_response = b"ERROR\r\n"

    assert driver.reset_parameters() == RetStatus.ERROR

    print("  ✓ ERROR returned")


def test_bad_return_status():
    """Test unrecognized status line is reported distinctly"""
    print("\nTesting bad return status...")

    driver, fake = make_driver()
    fake.next_response = b"GARBAGE\r\n"

    try:
        driver.reset_parameters()
        assert False, "Expected BadReturnStatusError"
    except BadReturnStatusError as e:
        assert e.status == RetStatus.ERROR
    assert driver.state == DriverState.NORMAL, "Settings mode left before decoding"

    print("  ✓ BadReturnStatusError with ERROR status")


def test_parameters_framing_error():
    """Test short parameter response"""
    print("\nTesting parameter framing error...")

    driver, fake = make_driver()
    fake.next_response = b"\x01\x02\x03\r\n"

    try:
        driver.get_parameters()
        assert False, "Expected FramingError"
    except FramingError as e:
        assert e.actual == 3

    print("  ✓ FramingError raised")


def test_malformed_response():
    """Test a corrupt response line"""
    print("\nTesting malformed response...")

    driver, fake = make_driver()
    fake.next_response = b"OK\nXX\r\n"

    try:
        driver.get_version()
        assert False, "Expected MalformedLineError"
    except MalformedLineError as e:
        assert e.buffer == b"OK\n"

    print("  ✓ MalformedLineError with corrupt buffer")


def test_not_open():
    """Test commands before open"""
    print("\nTesting commands before open...")

    driver, fake = make_driver(open_device=False)

    for command in (driver.get_version, driver.get_parameters, driver.reset_parameters):
        try:
            command()
            assert False, f"{command.__name__} should require open"
        except NotOpenError:
            pass
    assert fake.rts_changes == [], "Nothing should touch the port"

    print("  ✓ NotOpenError raised")


def test_change_baud():
    """Test persisting and following a new baud rate"""
    print("\nTesting change_baud...")

    driver, fake = make_driver()

    params = driver.get_parameters()
    params.serial_baud = SerialBaudRate.B115200
    assert driver.set_parameters(params) == RetStatus.OK
    driver.change_baud(params.serial_baud)

    assert fake.baud_rate == 115200
    assert fake.parameters.serial_baud == SerialBaudRate.B115200

    try:
        driver.change_baud(SerialBaudRate.UNKNOWN)
        assert False, "Expected ValueError"
    except ValueError:
        pass
    assert fake.baud_rate == 115200

    print("  ✓ Port switched to 115200")


def test_close_and_context_manager():
    """Test close does not touch the mode and context manager lifecycle"""
    print("\nTesting close...")

    fake = FakeLoRa6100()
    with LoRa6100(fake, settings_in_delay=0.0, settings_out_delay=0.0) as driver:
        assert fake.is_open
        driver.enable_settings()
        changes = list(fake.rts_changes)

    assert not fake.is_open
    assert not driver.is_open
    assert fake.rts_changes == changes, "Close should not release SET"

    try:
        driver.get_version()
        assert False, "Expected NotOpenError"
    except NotOpenError:
        pass

    print("  ✓ Closed without mode transition")


def test_write_failure_propagates():
    """Test transport errors surface unchanged"""
    print("\nTesting write failure...")

    driver, fake = make_driver()
    fake.fail_writes = True

    try:
        driver.get_version()
        assert False, "Expected TransportError"
    except TransportError:
        pass

    print("  ✓ TransportError raised")


def main():
    """Run all driver tests"""
    print("=" * 60)
    print("DRIVER TESTS (LOCAL - NO HARDWARE REQUIRED)")
    print("=" * 60)

    tests = [
        test_open_forces_normal_mode,
        test_settings_mode_idempotent,
        test_settings_mode_delays,
        test_get_version,
        test_get_parameters,
        test_set_then_get_parameters,
        test_reset_parameters,
        test_invalid_parameters_not_sent,
        test_device_reported_error,
        test_bad_return_status,
        test_parameters_framing_error,
        test_malformed_response,
        test_not_open,
        test_change_baud,
        test_close_and_context_manager,
        test_write_failure_propagates
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  ✗ FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"  ✗ ERROR: {e}")
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
