class DgfctError(Exception):
    def __init__(self, header, description):
        super(DgfctError, self).__init__('%s: %s' % (header, description))
        self.header = header
        self.description = description


class ConfigurationError(DgfctError):
    """
    The requested combination of scheme, stencil, basis and polynomial
    degree is not supported. Raised before any time stepping starts
    """


class StructuralError(DgfctError):
    """
    An assembled operator does not have the structure the limiter needs,
    e.g. a non-symmetric nonzero graph
    """


def dgfct_error(header, description, error_class=DgfctError):
    raise error_class(header, description)


def verify_key(name, key, options, loc=None):
    if key not in options:
        available_options = '\n'.join(' - %s' % m for m in options)
        loc = ' in %s' % loc if loc is not None else ''
        dgfct_error('Unsupported %s' % name,
                    'The %s %r is not available%s, please use one of:\n%s'
                    % (name, key, loc, available_options),
                    ConfigurationError)
