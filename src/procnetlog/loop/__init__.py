"""
The sampling/forwarding loop run inside the child process.

Import TickLoop from procnetlog.loop.tick_loop; the module is also executed
directly with ``python -m procnetlog.loop.tick_loop`` so it is not imported
here.
"""
