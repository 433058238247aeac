"""rmd - read a directory of Markdown files in the terminal."""

__version__ = "0.1.0"
