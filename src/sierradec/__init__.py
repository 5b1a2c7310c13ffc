'''
sierradec - Sierra to readable pseudo-source decompiler
'''

__version__ = '0.1.0'

from .common import *
from .ir import *
from .sierra import *
from .decompiler import *
from .pipeline import *
