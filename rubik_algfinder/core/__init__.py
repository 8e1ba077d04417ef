from rubik_algfinder.core.cube_model import CubeGeometry
from rubik_algfinder.core.facelets import FaceletState
