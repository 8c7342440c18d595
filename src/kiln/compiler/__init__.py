"""kiln compiler — template text to Python module source.

Passes live in mixins, one module per concern:
- includes: include/extend resolution (pass 1)
- blocks: setblock extraction and block substitution (passes 2-3)
- code: raw-code and interpolation translation (passes 4-5)
- codegen: assembly of the final artifact
"""

from kiln.compiler.codegen import CodeBuilder, assemble
from kiln.compiler.code import rewrite_dot_access
from kiln.compiler.core import Compiler

__all__ = ["CodeBuilder", "Compiler", "assemble", "rewrite_dot_access"]
