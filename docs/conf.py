"""Sphinx configuration for bundlectl documentation."""

import importlib.metadata

# -- Project information -----------------------------------------------------

project = "bundlectl"
author = "bundlectl contributors"
copyright = "2026, bundlectl contributors"
release = importlib.metadata.version("bundlectl")
version = ".".join(release.split(".")[:2])

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_copybutton",
    "myst_parser",
]

exclude_patterns = ["_build"]

# -- Options for autodoc -----------------------------------------------------

autodoc_member_order = "bysource"
autodoc_typehints = "description"

# -- Options for Napoleon (Google-style docstrings) --------------------------

napoleon_google_docstring = True
napoleon_numpy_docstring = False

# -- Options for intersphinx -------------------------------------------------

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "httpx": ("https://www.python-httpx.org/", None),
    "cryptography": ("https://cryptography.io/en/latest/", None),
    "pydantic": ("https://docs.pydantic.dev/latest/", None),
}

# -- Options for MyST (Markdown support) -------------------------------------

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

myst_enable_extensions = ["colon_fence"]

# -- Options for HTML output -------------------------------------------------

html_theme = "furo"
html_title = f"bundlectl {release}"

# -- Options for sphinx-copybutton -------------------------------------------

copybutton_prompt_text = r"^\$ "
copybutton_prompt_is_regexp = True
