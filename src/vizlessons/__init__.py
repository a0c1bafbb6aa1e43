"""vizlessons: executable data-visualization lessons.

Lessons load small public datasets, reshape them into tidy form, build
plotnine charts in the grammar of graphics and save them as PNGs.
"""

__version__ = "0.3.0"
