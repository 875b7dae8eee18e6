from patchk.type import \
    Type, TypeTag, TypeUnion, TypeSet, TypingError
from patchk.signature import \
    Signature, ArityMismatch
from patchk.solver import \
    CompletenessSolver, check_completeness
from patchk.lang import \
    Language, Declaration
from patchk.graph import \
    CoverageGraph
