"""SDK source parser -- load Go sources, extract the service model, detect chains.

This sub-package is the first half of the clisync pipeline: turning a
directory of Go SDK sources into the transient
:class:`~clisync.models.Service` model that the differ and generators
consume.

Typical usage::

    from clisync.parser import detect_chains, extract_model

    services, structs = extract_model("vendor/github.com/Scalingo/go-scalingo/v8")
    detect_chains(services)

Sub-modules:

* :mod:`~clisync.parser.loader` -- file discovery with exclusion patterns
  and tree-sitter parsing.
* :mod:`~clisync.parser.extractor` -- two-pass extraction of structs and
  service interfaces, plus type rendering and name inference.
* :mod:`~clisync.parser.shapes` -- return-shape classification and
  parameter shape predicates.
* :mod:`~clisync.parser.chains` -- one-hop chained-parameter detection.
"""

from clisync.parser.chains import detect_chains
from clisync.parser.extractor import extract_model, infer_param_name

__all__ = ["extract_model", "infer_param_name", "detect_chains"]
