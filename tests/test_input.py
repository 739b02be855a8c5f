import pytest
from helpers import get_test_file_name, BASE_INPUT
from dgfct import Simulation
from dgfct.__main__ import override_input_variables
from dgfct.utils import DgfctError


def test_base_input():
    fn = get_test_file_name('base.inp')
    sim = Simulation()
    sim.input.read_yaml(fn)

    gv = lambda k, t: sim.input.get_value(k, required_type=t)
    assert gv('metadata/author', 'string') == 'dgfct developers'
    assert gv('metadata/description', 'string') == 'NoDescription'

    assert tuple(gv('some_vals/bools', 'list(bool)')) == (True, True, False, False)
    assert tuple(gv('some_vals/ints', 'list(int)')) == (1, 1, 0, 0)
    assert tuple(gv('some_vals/floats', 'list(float)')) == (1.1, 2, 3.0e3)
    assert gv('some_vals/computed', 'float') == 2.0
    assert gv('some_vals/small', 'float') == 1e-3
    assert gv('limiter/mass_limit_beta', 'float') == 1.0
    assert gv('limiter/stencil', 'string') == 'Local'


def test_wrong_types():
    sim = Simulation()
    sim.input.read_yaml(get_test_file_name('base.inp'))

    with pytest.raises(DgfctError):
        sim.input.get_value('some_vals/computed', required_type='int')
    with pytest.raises(DgfctError):
        sim.input.get_value('some_vals/bools', required_type='list(int)')
    with pytest.raises(DgfctError):
        sim.input.get_value('metadata/author', required_type='float')


def test_default_and_missing_values():
    sim = Simulation()
    sim.input.read_yaml(get_test_file_name('base.inp'))

    assert sim.input.get_value('limiter/subcells', True, 'bool') is True
    assert sim.input.get_value('limiter/scheme', 'None', 'string') == 'DiscreteUpwind+FCT'
    with pytest.raises(DgfctError):
        sim.input.get_value('limiter/rusanov_estimate', required_type='string')


def test_has_path():
    fn = get_test_file_name('base.inp')
    sim = Simulation()
    sim.input.read_yaml(fn)

    assert sim.input.has_path('dgfct') is True
    assert sim.input.has_path('dgfct/type') is True
    assert sim.input.has_path('dgfct222') is False
    assert sim.input.has_path('dgfct222/type') is False
    assert sim.input.has_path('dgfct/type222') is False


def test_ensure_path():
    fn = get_test_file_name('base.inp')
    sim = Simulation()
    sim.input.read_yaml(fn)

    a = sim.input.ensure_path('limiter')
    assert a['scheme'] == 'DiscreteUpwind+FCT'

    b = sim.input.ensure_path('does_not_exist')
    assert len(b) == 0
    assert 'does_not_exist' in sim.input

    c = sim.input.ensure_path('does_not_exist/c')
    assert len(c) == 0
    assert len(sim.input.get_value('does_not_exist')) == 1


def test_wrong_header():
    sim = Simulation()
    with pytest.raises(DgfctError):
        sim.input.read_yaml(get_test_file_name('wrong_header.inp'))

    with pytest.raises(DgfctError):
        sim.input.read_yaml(yaml_string=BASE_INPUT.replace('version: 1.0', 'version: 2.0'))


def test_missing_file():
    sim = Simulation()
    with pytest.raises(DgfctError):
        sim.input.read_yaml(get_test_file_name('does_not_exist.inp'))


def test_override_input():
    sim = Simulation()
    sim.input.read_yaml(yaml_string=BASE_INPUT)
    override_input_variables(sim, ['time/dt=0.02', 'limiter/scheme=2', 'mesh/periodic=[yes]'])

    assert sim.input.get_value('time/dt', required_type='float') == 0.02
    assert sim.input.get_value('limiter/scheme', required_type='int') == 2
    assert sim.input.get_value('mesh/periodic', required_type='list(bool)') == [True]


def test_float_lists_from_strings():
    sim = Simulation()
    sim.input.read_yaml(yaml_string=BASE_INPUT)
    sim.input.set_value('problem/velocity', ['1e-3', 2, 3.5])
    assert sim.input.get_value('problem/velocity', required_type='list(float)') == [1e-3, 2.0, 3.5]

    sim.input.set_value('problem/velocity', ['fast', 2])
    with pytest.raises(DgfctError):
        sim.input.get_value('problem/velocity', required_type='list(float)')
