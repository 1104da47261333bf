"""crudd -- a diagnostics dashboard for the machine it runs on.

Serves a fixed catalog of system-inspection commands (process list,
memory, disks, network, ping, uptime) over HTTP. Each request runs the
selected command as a subprocess and streams its output to the browser
while the command is still running.
"""

__version__ = "0.1.0"
