from .config import *
from .errors import *
from .strict_base import *
