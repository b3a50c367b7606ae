"""Shared constants for docstring prompting."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You are a senior engineer documenting an existing codebase. Return the complete "
    "source file with documentation added. Never change behaviour."
)

DOCSTRING_TEMPLATE = """\
Please analyze the following source code and generate comprehensive docstrings for every function, class, method, and interface. The file type is "{file_type}" and requires language-appropriate documentation.

For each element that needs documentation:
1. Create a descriptive summary of what it does
2. Document all parameters, including their types and purpose
3. Document return values with their types and descriptions
4. Document any errors or exceptions that might be thrown
5. Include examples where helpful to demonstrate usage

{conventions}

Maintain the existing code style and formatting. Only add or update docstrings; do not modify the actual code functionality. If an element already has partial documentation, enhance it rather than replacing it completely.

Begin the file with a short module-level comment or docstring summarising its purpose.

Focus especially on public exports and APIs that other developers would need to understand to use this code effectively.

Code:
{content}
"""

_JSDOC_TYPED = """\
For TypeScript/TSX files:
- Use JSDoc-style comments with /** ... */
- Document parameters with @param {type} name - description
- Document returns with @returns {type} description
- Document interfaces, types and their properties
- Note any generics or type constraints"""

_JSDOC_UNTYPED = """\
For JavaScript/JSX files:
- Use JSDoc-style comments with /** ... */
- Document parameters with @param {type} name - description
- Document returns with @returns description
- Include type hints where possible"""

_PYTHON = """\
For Python files:
- Use Google-style docstrings with triple quotes \"\"\"
- Format parameters as "Args:" followed by indented parameter descriptions
- Format return values as "Returns:" followed by indented descriptions
- Document exceptions with "Raises:" section
- Follow PEP 257 conventions"""

_GENERIC = """\
For other files:
- Use the comment syntax native to the language
- Keep each comment directly above the element it documents"""

CONVENTIONS: dict[str, str] = {
    "TypeScript": _JSDOC_TYPED,
    "TSX": _JSDOC_TYPED,
    "JavaScript": _JSDOC_UNTYPED,
    "JSX": _JSDOC_UNTYPED,
    "Python": _PYTHON,
    "Unknown": _GENERIC,
}


__all__ = ["CONVENTIONS", "DOCSTRING_TEMPLATE", "SYSTEM_PROMPT"]
