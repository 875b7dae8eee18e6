from __future__ import annotations

import rdflib
from rdflib import Namespace

PCK = Namespace('https://example.com/patchk#')
EX = Namespace('https://example.com/#')
RDF = rdflib.RDF
RDFS = rdflib.RDFS

namespaces = {"pck": PCK, "ex": EX}
