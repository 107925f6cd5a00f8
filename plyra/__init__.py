# Plyra namespace package: lets plyra-rollback share the "plyra"
# namespace with other plyra-* distributions.
from pkgutil import extend_path

__path__ = extend_path(__path__, __name__)
