"""Built-in CLI sub-commands for riotauth.

* :mod:`~riotauth.commands.session` -- ``token``, ``status`` and ``logout``.
* :mod:`~riotauth.commands.config` -- view and modify global settings.
"""
