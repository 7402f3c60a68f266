"""Built-in CLI sub-command groups for stockdata.

* :mod:`~stockdata.commands.config` -- view and modify the config file.

Tool commands live directly on the root app in :mod:`stockdata.app`.
"""
