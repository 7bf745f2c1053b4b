# Sphinx configuration file

import os
import sys
sys.path.insert(0, os.path.abspath('../src'))

project = 'Workflow Engine'
copyright = '2026, Workflow Engine contributors'
author = 'Workflow Engine contributors'
release = '0.1.0'

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'

# Pydantic models carry their own field docs; keep class pages compact.
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': True,
    'exclude-members': 'model_config,model_fields,model_computed_fields',
}
autodoc_typehints = 'description'

napoleon_google_docstring = True
napoleon_numpy_docstring = False

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
}
