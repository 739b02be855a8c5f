import collections
import yaml
from dgfct.utils import dgfct_error


class UndefinedParameter(object):
    def __repr__(self):
        "For Sphinx"
        return '<UNDEFINED>'


UNDEFINED = UndefinedParameter()


class OrderedLoader(yaml.SafeLoader):
    """
    PyYAML loader that keeps keys in dictionaries ordered
    like they were on the input file
    """


def _dict_constructor(loader, node):
    loader.flatten_mapping(node)
    return collections.OrderedDict(loader.construct_pairs(node))


def _dict_representer(dumper, data):
    return dumper.represent_dict(data.items())


OrderedLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _dict_constructor)


class OrderedDumper(yaml.SafeDumper):
    pass


OrderedDumper.add_representer(collections.OrderedDict, _dict_representer)


def _yaml_float(value):
    "The YAML parser thinks 1e-3 is a string (while 1.0e-3 is a float)"
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    return value


class Input(collections.OrderedDict):
    def __init__(self, simulation):
        """
        Holds the input values provided by the user
        """
        super(Input, self).__init__()
        self.simulation = simulation
        self.file_name = None
        self._already_logged = set()

    def read_yaml(self, file_name=None, yaml_string=None):
        """
        Read the input to a dgfct simulation from a YAML formated input
        file or a YAML formated string. The user will get an error if
        the input is malformed
        """
        if yaml_string is None:
            try:
                with open(file_name, 'rt') as inpf:
                    inp = yaml.load(inpf, Loader=OrderedLoader)
            except (IOError, OSError) as e:
                dgfct_error('Error on input file', str(e))
            except yaml.YAMLError as e:
                dgfct_error('Input file "%s" is not a valid YAML file' % file_name, str(e))
        else:
            try:
                inp = yaml.load(yaml_string, Loader=OrderedLoader)
            except yaml.YAMLError as e:
                dgfct_error('Input string is not valid YAML', str(e))

        if not isinstance(inp, dict) or not isinstance(inp.get('dgfct'), dict):
            dgfct_error('Malformed input', 'The input must start with a "dgfct" header section')
        header = inp['dgfct']
        if header.get('type') != 'input' or header.get('version') != 1.0:
            dgfct_error('Malformed input',
                        'Expected "type: input" and "version: 1.0" in the dgfct header, found %r'
                        % dict(header))

        self.clear()
        self.update(inp)
        self.file_name = file_name

    def get_value(self, path, default_value=UNDEFINED, required_type='any'):
        """
        Get an input value by its path in the input dictionary

        Gives an error if there is no default value supplied
        and the  input variable does not exist

        Arguments:
            path: a list of path components or the "/" separated
                path to the variable in the input dictionary
            default_value: the value to return if the path does
                not exist in the input dictionary
            required_type: expected type of the variable. Giving
                type="any" does no type checking

        Returns:
            The input value if it exist otherwise the default value
        """
        # Allow path to be a list or a "/" separated string
        if isinstance(path, str):
            pathstr = path
            path = path.split('/')
        else:
            pathstr = '/'.join(path)

        d = self
        for p in path:
            if isinstance(d, list):
                try:
                    p = int(p)
                except ValueError:
                    dgfct_error('List index not integer', 'Not a valid list index:  %s' % p)
            elif p not in d:
                if default_value is UNDEFINED:
                    dgfct_error('Missing parameter on input file',
                                'Missing required input parameter:\n  %s' % pathstr)
                else:
                    msg = '    No value set for "%s", using default value %r' % (pathstr, default_value)
                    if msg not in self._already_logged:
                        self.simulation.log.debug(msg)
                        self._already_logged.add(msg)
                    return default_value
            d = d[p]

        def check_isinstance(value, classes):
            """
            Give error if the input data is not of the required type
            """
            # bool is a subclass of int, but True is not a number on the input file
            if isinstance(value, bool) and bool not in classes:
                value = str(value)
            if not isinstance(value, classes):
                dgfct_error('Malformed data on input file',
                            'Parameter %s should be of type %s,\nfound %r %r'
                            % (pathstr, required_type, value, type(value)))

        # Validate according to required data type
        number = (int, float)
        dict_types = (dict, collections.OrderedDict)
        if required_type == 'bool':
            check_isinstance(d, (bool,))
        elif required_type == 'float':
            d = _yaml_float(d)
            check_isinstance(d, number)
            d = float(d)
        elif required_type == 'int':
            check_isinstance(d, (int,))
        elif required_type == 'string':
            check_isinstance(d, (str,))
        elif required_type == 'dict(string:any)':
            check_isinstance(d, dict_types)
            for key in d:
                check_isinstance(key, (str,))
        elif required_type == 'list(float)':
            check_isinstance(d, (list,))
            d = [_yaml_float(elem) for elem in d]
            for elem in d:
                check_isinstance(elem, number)
            d = [float(elem) for elem in d]
        elif required_type == 'list(int)':
            check_isinstance(d, (list,))
            for elem in d:
                check_isinstance(elem, (int,))
        elif required_type == 'list(bool)':
            check_isinstance(d, (list,))
            for elem in d:
                check_isinstance(elem, (bool,))
        elif required_type == 'list(string)':
            check_isinstance(d, (list,))
            for elem in d:
                check_isinstance(elem, (str,))
        elif required_type == 'any':
            pass
        else:
            raise ValueError('Unknown required_type %s' % required_type)

        # Show what input values we use
        msg = '    Input value "%s" set to %r' % (pathstr, d)
        if msg not in self._already_logged:
            self.simulation.log.debug(msg)
            self._already_logged.add(msg)

        return d

    def set_value(self, path, value):
        """
        Set an input value by its path in the input dictionary

        Arguments:
            path: a list of path components or the "/" separated
                path to the variable in the input dictionary
            value: the value to set

        """
        # Allow path to be a list or a "/" separated string
        if isinstance(path, str):
            path = path.split('/')

        d = self
        for p in path[:-1]:
            if p not in d:
                d[p] = collections.OrderedDict()
            d = d[p]
        d[path[-1]] = value

    def has_path(self, path):
        """
        Check if the path exists in the input dictionary
        """
        if isinstance(path, str):
            path = path.split('/')

        d = self
        for p in path:
            if not isinstance(d, dict) or p not in d:
                return False
            d = d[p]
        return True

    def ensure_path(self, path):
        """
        Make sure the path exists in the input dictionary and
        return the dictionary found there
        """
        if isinstance(path, str):
            path = path.split('/')

        d = self
        for p in path:
            if p not in d:
                d[p] = collections.OrderedDict()
            d = d[p]
        return d

    def get_output_file_path(self, path, default_value=UNDEFINED):
        """
        Get the name of an output file

        Automatically prefixes the file name with the output prefix
        """
        prefix = self.get_value('output/prefix', '', 'string')
        filename = self.get_value(path, default_value, 'string')
        if default_value is None and filename is None:
            return None
        else:
            return prefix + filename

    def __str__(self):
        inp = collections.OrderedDict(self.items())
        return yaml.dump(inp, Dumper=OrderedDumper, indent=4)
