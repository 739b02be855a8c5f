import sys
import yaml
from dgfct import get_version, get_detailed_version, Simulation, run_simulation


def main(inputfile, input_override):
    """
    Run dgfct
    """
    sim = Simulation()
    sim.input.read_yaml(inputfile)

    # Alter input by values given on the command line
    if input_override is not None:
        override_input_variables(sim, input_override)

    # Setup logging before we start printing anything
    sim.log.setup()

    # Print banner with dgfct version number
    version = get_detailed_version() or get_version()
    sim.log.info('=' * 80)
    sim.log.info('                  dgfct   %s' % version)
    sim.log.info('=' * 80)
    sim.log.info()

    # Run setup and run the dgfct simulation time loop
    run_simulation(sim, setup_logging=False)

    sim.log.info('=' * 80)
    if sim.success:
        sim.log.info('dgfct finished successfully')
    else:
        sim.log.info('dgfct finished with errors')
    sim.log.end_of_simulation()
    return sim.success


def override_input_variables(simulation, input_override):
    """
    The user can override values given on the input file via
    command line parameters like::

        --set-input time/dt=0.1

    This code updates the input dictionary with these modifications
    """
    for overrider in input_override:
        # Overrider is something like "time/dt=0.1"
        path = overrider.split('=')[0]
        value = overrider[len(path) + 1:]

        # Convert value to Python object
        try:
            py_value = yaml.safe_load(value)
        except yaml.YAMLError as e:
            print('ERROR: Input variable given via command line argument failed:')
            print('ERROR:       --set-input "%s"' % overrider)
            print('ERROR: Got exception: %s' % str(e))
            sys.exit(-1)

        simulation.input.set_value(path, py_value)


def run_from_console():
    """
    Parse command line arguments and run dgfct
    """
    import argparse

    parser = argparse.ArgumentParser(prog='dgfct',
                                     description='Flux corrected transport for DG advection')
    parser.add_argument('inputfile', help='Name of file containing simulation '
                        'configuration on the dgfct YAML input format')
    parser.add_argument('--set-input', action='append', help='Set an input key. Can be added several '
                        'times to set multiple input keys. Example: --set-input time/dt=0.1')

    args = parser.parse_args()

    # Run dgfct
    success = main(args.inputfile, args.set_input)
    sys.exit(0 if success else 1)


if __name__ == '__main__':
    run_from_console()
