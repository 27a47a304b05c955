"""testfinder - classify project files into tests, helpers and sources.

testfinder normalizes user-declared glob patterns into a canonical rule
set, classifies any path against it, and walks directory trees to collect
the test files a runner should execute and the helper files it should
treat as shared, non-executed modules.
"""

__version__ = "1.0.0"
