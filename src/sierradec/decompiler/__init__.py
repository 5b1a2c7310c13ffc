'''Pseudo-source emission'''

from .names import *
from .types import *
from .walker import *
from .emitter import *
