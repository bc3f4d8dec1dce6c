"""labctl: install and run a JupyterLab server from a virtual environment.

Also ships a small wrapper around SentencePiece's spm_train.
"""

__version__ = "0.1.0"
