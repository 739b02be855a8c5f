from .quadrature import QuadratureRule, get_quadrature_rule, gauss_legendre
from .element import TensorProductElement, BASIS_TYPES
from .mesh import StructuredMesh, Face
from .space import DGFunctionSpace
from .assembly import assemble_mass, assemble_convection, assemble_inflow, iter_face_data, \
    face_quadrature_rule, element_quadrature_order
