import os

def unset_envs():
    # For unit tests we must fully control which tools are found
    # so that there are no unexpected changes coming from the
    # environment, for example when running under a Swift toolchain.
    for v in list(os.environ):
        if v.startswith('SWIFT_DRIVER_'):
            del os.environ[v]

unset_envs()
