# -*- coding: UTF-8 -*-
import os
import logging

import numpy as np

# tolerance for discriminant sign and degeneracy checks
EPS=np.finfo(float).eps

# distance of a node the front has not reached yet
MAXDIST=np.finfo(float).max

# neighbour index reported for the off-grid side of an edge node
OUTOFBOUNDS=-1

# logger
LOGLEVEL=os.environ.get("FASTMARCHING_LOGLEVEL","INFO").upper()

logger=logging.getLogger("FastMarching")
logger.setLevel(LOGLEVEL)
ch = logging.StreamHandler()
ch.setLevel(logging.DEBUG)
ch.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.handlers.clear()
logger.addHandler(ch)
