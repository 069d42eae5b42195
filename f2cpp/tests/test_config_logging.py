# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

import logging
import sys

import pytest

from f2cpp import (
    config, config_override, as_bool, Configuration, ConfigOption, log_levels, set_log_level, logger,
    add_file_handler, FileLogger, Diagnostics, DiagnosticCategory, Diagnostic
)
from f2cpp.tools import auto_post_mortem_debugger


def test_config_defaults():
    for key in ('print-config', 'log-level', 'debug', 'tab-width', 'simplify-passes', 'prototypes-first'):
        assert key in config

    with pytest.raises(KeyError):
        config['no-such-option'] = 1


def test_config_override():
    original = config['tab-width']
    with config_override({'tab-width': '4', 'prototypes-first': 'yes'}):
        assert config['tab-width'] == 4
        assert config['prototypes-first'] is True
    assert config['tab-width'] == original


def test_config_callbacks():
    with config_override({'debug': '1'}):
        assert sys.excepthook is auto_post_mortem_debugger
    assert sys.excepthook is sys.__excepthook__

    with config_override({'log-level': 'DETAIL'}):
        assert logger.level == log_levels['DETAIL']


def test_configuration_environment(monkeypatch):
    cfg = Configuration('test')
    cfg.register('value', 1, env_variable='F2CPP_TEST_VALUE', preprocess=int)
    cfg.register('flag', False, env_variable='F2CPP_TEST_FLAG', preprocess=as_bool)

    monkeypatch.setenv('F2CPP_TEST_VALUE', '7')
    monkeypatch.setenv('F2CPP_TEST_FLAG', 'off')
    cfg.initialize()
    assert cfg['value'] == 7
    assert cfg['flag'] is False

    monkeypatch.delenv('F2CPP_TEST_VALUE')
    cfg.initialize()
    assert cfg['value'] == 1


def test_config_option(monkeypatch):
    option = ConfigOption('width', default='8', env_variable='F2CPP_TEST_WIDTH', preprocess=int)
    monkeypatch.delenv('F2CPP_TEST_WIDTH', raising=False)
    assert option.convert(option.raw_value()) == 8

    monkeypatch.setenv('F2CPP_TEST_WIDTH', '3')
    assert option.raw_value() == '3'
    assert ConfigOption('plain', default=1).convert('x') == 'x'
    assert config.options['tab-width'].env_variable == 'F2CPP_TAB_WIDTH'


@pytest.mark.parametrize('value, expected', [
    ('1', True), ('true', True), ('On', True), ('0', False), ('', False), ('no', False),
    (0, False), (2, True), (None, False),
])
def test_as_bool(value, expected):
    assert as_bool(value) is expected


def test_set_log_level():
    level = logger.level
    set_log_level(log_levels['perf'])
    assert logger.level == 15
    with pytest.raises(ValueError):
        set_log_level(1234)
    set_log_level(level)
    assert logging.getLevelName(12) == 'DETAIL'


def test_add_file_handler(tmp_path):
    logfile = tmp_path/'f2cpp.log'
    handler = add_file_handler(logfile, level=log_levels['DEBUG'])
    try:
        diagnostics = Diagnostics(filename='foo.f')
        diagnostics.add(DiagnosticCategory.ARITY_MISMATCH, 'f is defined with 2 arguments', 7)
        handler.flush()
    finally:
        logger.removeHandler(handler)
        handler.close()
    assert 'foo.f:7 arity-mismatch: f is defined with 2 arguments' in logfile.read_text()


def test_file_logger(tmp_path):
    logfile = tmp_path/'batch.log'
    batch_logger = FileLogger('f2cpp-batch', logfile, level=log_levels['INFO'], file_level=log_levels['DEBUG'])
    batch_logger.debug('only in file')
    for handler in batch_logger.handlers:
        handler.flush()
    assert 'only in file' in logfile.read_text()
    for handler in list(batch_logger.handlers):
        batch_logger.removeHandler(handler)
        handler.close()


def test_diagnostics():
    diagnostics = Diagnostics()
    first = diagnostics.add(DiagnosticCategory.UNRESOLVED_SYMBOL, 'z is referenced but never declared', 3)
    diagnostics.add(DiagnosticCategory.UNRESOLVED_SYMBOL, 'z is referenced but never declared', 3)
    diagnostics.add(DiagnosticCategory.UNSUPPORTED, 'something else')
    diagnostics.add(DiagnosticCategory.STRUCTURAL_RISK, 'risky', 3)

    assert len(diagnostics) == 3
    assert first == Diagnostic(DiagnosticCategory.UNRESOLVED_SYMBOL, 'z is referenced but never declared', 3)
    assert first.comment == '// [f2cpp] unresolved-symbol: z is referenced but never declared'
    assert [d.message for d in diagnostics.by_category(DiagnosticCategory.UNSUPPORTED)] == ['something else']

    by_line = diagnostics.by_line()
    assert list(by_line) == [3, None]
    assert [d.category for d in by_line[3]] == [
        DiagnosticCategory.UNRESOLVED_SYMBOL, DiagnosticCategory.STRUCTURAL_RISK
    ]
    assert not Diagnostics()
