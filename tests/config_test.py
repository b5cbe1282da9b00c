# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
import os

import pytest
import yaml

from gradpass.config import Config, set_temporary, temporary_config


def test_defaults():
    assert Config.get_default('autodiff', 'zero_op') == '__zero__'
    assert Config.get_default('autodiff.sum_op') == '__ewise_sum__'
    assert Config.get_default('autodiff', 'mirror_suffix') == '_mirror'
    assert Config.get_default('autodiff', 'mirror_strategy') == 'StoreAll'
    assert Config.get_default('debugprint') is False
    assert Config.get_metadata('autodiff', 'seed_op')['type'] == 'str'


def test_set_temporary():
    path = ["autodiff", "mirror_suffix"]
    current_value = Config.get(*path)
    with set_temporary(*path, value="_recomputed"):
        assert Config.get(*path) == "_recomputed"
        assert Config.get("autodiff.mirror_suffix") == "_recomputed"
    assert Config.get(*path) == current_value


def test_set_temporary_exception():
    path = ["autodiff", "mirror_suffix"]
    initial_value = Config.get(*path)
    try:
        with set_temporary(*path, value=initial_value + "_other"):
            raise ValueError()
    except ValueError:
        assert Config.get(*path) == initial_value
    else:
        raise RuntimeError("No exception was raised.")


def test_temporary_config():
    path = ["autodiff", "zero_op"]
    current_value = Config.get(*path)
    with temporary_config():
        Config.set(*path, value="fill_zero")
        Config.set("debugprint", value=True)
        assert Config.get(*path) == "fill_zero"
        assert Config.get_bool("debugprint")
    assert Config.get(*path) == current_value


def test_environment_override(monkeypatch):
    monkeypatch.setenv('GRADPASS_autodiff_mirror_suffix', '_env')
    monkeypatch.setenv('GRADPASS_debugprint', 'yes')
    assert Config.get('autodiff', 'mirror_suffix') == '_env'
    assert Config.get_bool('debugprint') is True


def test_nondefaults_and_save(tmp_path):
    with temporary_config():
        Config.set('autodiff', 'sum_op', value='add_n')
        assert Config.nondefaults() == {'autodiff': {'sum_op': 'add_n'}}

        path = os.path.join(str(tmp_path), 'config.yml')
        Config.save(path)
        with open(path) as f:
            assert yaml.safe_load(f) == {'autodiff': {'sum_op': 'add_n'}}

        Config.set('autodiff', 'sum_op', value='__ewise_sum__')
        Config.load(path)
        assert Config.get('autodiff', 'sum_op') == 'add_n'
        # Entries missing from the file are filled with defaults
        assert Config.get('autodiff', 'zero_op') == '__zero__'


def test_malformed_file_names_path(tmp_path):
    path = os.path.join(str(tmp_path), 'broken.conf')
    with open(path, 'w') as f:
        f.write('autodiff: [unclosed')

    with temporary_config():
        with pytest.raises(ValueError, match='broken.conf'):
            Config.load(path)
