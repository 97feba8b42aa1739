"""
Keep a folder of HTML pages in sync with a folder of wiki-flavoured markdown.

Each watched folder is a ``WikiConfiguration``: markdown files in the input
directory are rendered into the output directory whenever they change, and
``[[wiki links]]`` become plain links to the sibling pages.
"""

from .wiki_config import ActivityLog, WikiConfiguration, WikiConfigurationRecord

__version__ = "0.3.0"

__all__ = ["ActivityLog", "WikiConfiguration", "WikiConfigurationRecord", "__version__"]
