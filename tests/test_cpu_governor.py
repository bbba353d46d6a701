from __future__ import annotations

from hackberry_setup.config import SetupConfig
from hackberry_setup.lib.systemd import ConfiguredWith, NotConfigured, environment_value, parse_unit
from hackberry_setup.operations import CpuGovernorOperation
from hackberry_setup.operations.op_20_cpu_governor import render_unit
from hackberry_setup.outcome import Outcome

UNIT = "cpu-governor.service"
UNIT_PATH = "/etc/systemd/system/cpu-governor.service"


def test_environment_value_missing_text():
    assert environment_value(None, "GOVERNOR") == NotConfigured()
    assert environment_value("", "GOVERNOR") == NotConfigured()


def test_environment_value_from_rendered_unit():
    assert environment_value(render_unit("ondemand"), "GOVERNOR") == ConfiguredWith("ondemand")


def test_environment_value_ignores_comments_and_other_sections():
    text = (
        "[Unit]\n"
        "Environment=GOVERNOR=wrong\n"
        "[Service]\n"
        "# Environment=GOVERNOR=commented\n"
        'Environment="LANG=C" GOVERNOR=conservative\n'
        "Environment=GOVERNOR=schedutil\n"
    )
    assert environment_value(text, "GOVERNOR") == ConfiguredWith("schedutil")


def test_environment_value_without_variable():
    assert environment_value("[Service]\nType=oneshot\n", "GOVERNOR") == NotConfigured()
    assert environment_value("[Service]\nEnvironment=GOVERNOR=\n", "GOVERNOR") == NotConfigured()


def test_parse_unit_keeps_repeated_keys_and_continuations():
    sections = parse_unit("[Service]\nExecStart=/bin/a \\\n  --flag\nExecStart=/bin/b\n")
    assert sections["Service"] == [("ExecStart", "/bin/a --flag"), ("ExecStart", "/bin/b")]


def test_rewrites_unit_with_new_governor(manifest, host, system):
    system.write(UNIT_PATH, render_unit("performance"))
    system.units[UNIT] = "enabled"

    result = CpuGovernorOperation(manifest).run(SetupConfig(cpu_governor="powersave"), host)

    assert result.outcome is Outcome.SUCCESS
    assert "performance -> powersave" in result.detail
    text = system.path(UNIT_PATH).read_text(encoding="utf-8")
    assert environment_value(text, "GOVERNOR") == ConfiguredWith("powersave")
    assert system.ran("systemctl", "daemon-reload")
    assert system.ran("systemctl", "enable", UNIT)


def test_creates_and_enables_missing_unit(manifest, host, system, config):
    result = CpuGovernorOperation(manifest).run(config, host)

    assert result.outcome is Outcome.SUCCESS
    assert system.path(UNIT_PATH).read_text(encoding="utf-8") == render_unit("powersave")
    assert system.units[UNIT] == "enabled"


def test_configured_and_enabled_is_skipped(manifest, host, system):
    system.write(UNIT_PATH, render_unit("powersave"))
    system.units[UNIT] = "enabled"
    before = system.snapshot()

    result = CpuGovernorOperation(manifest).run(SetupConfig(cpu_governor="powersave"), host)

    assert result.outcome is Outcome.SKIPPED_OTHER
    assert system.snapshot() == before
    assert not system.ran("systemctl", "enable")


def test_configured_but_disabled_is_enabled(manifest, host, system, config):
    system.write(UNIT_PATH, render_unit("powersave"))
    system.units[UNIT] = "disabled"

    result = CpuGovernorOperation(manifest).run(config, host)

    assert result.outcome is Outcome.SUCCESS
    assert result.detail == f"enabled {UNIT}"


def test_enable_that_does_not_stick_fails_verification(manifest, host, system, config):
    system.sticky_units.add(UNIT)

    result = CpuGovernorOperation(manifest).run(config, host)

    assert result.outcome is Outcome.FAILED
    assert "verification failed" in result.detail


def test_guard_respects_flag(manifest, host, system):
    result = CpuGovernorOperation(manifest).run(SetupConfig(set_governor=False), host)
    assert result.outcome is Outcome.SKIPPED_BY_FLAG
    assert system.calls == []


def test_unbalanced_quotes_read_as_not_configured():
    text = '[Service]\nEnvironment="GOVERNOR=performance\n'
    assert environment_value(text, "GOVERNOR") == NotConfigured()


def test_unit_with_broken_quoting_is_rewritten(manifest, host, system, config):
    system.write(UNIT_PATH, '[Service]\nEnvironment="GOVERNOR=performance\n')
    system.units[UNIT] = "enabled"

    result = CpuGovernorOperation(manifest).run(config, host)

    assert result.outcome is Outcome.SUCCESS
    assert system.path(UNIT_PATH).read_text(encoding="utf-8") == render_unit("powersave")
