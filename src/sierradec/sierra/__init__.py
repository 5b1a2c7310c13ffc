'''Sierra loader and catalog'''

from .parser import *
from .descriptors import *
from .catalog import *
