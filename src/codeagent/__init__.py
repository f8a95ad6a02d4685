"""codeagent - natural-language front end for file operations on a codebase.

Turns a free-form request into typed Operations, orders them by dependency,
executes them with partial-failure handling and routes every step to a
local model profile.
"""

__version__ = "0.1.0"
