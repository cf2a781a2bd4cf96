"""
codeindex - tag index generation for Clojure projects and their dependencies.

Extracts dependency jars into a scratch directory and runs etags or ctags
over the combined source tree.
"""

__version__ = "0.3.0"
