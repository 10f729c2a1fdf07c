import tempfile

import adbroot

with tempfile.TemporaryDirectory() as storage:
    system = adbroot.CallerIdentity(role=adbroot.Role.SYSTEM, uid=1000)
    control = adbroot.RecordingControl()
    service = adbroot.ADBRootService.from_config(
        adbroot.ServiceConfig(storage_dir=storage),
        control=control,
        resolver=lambda: system,
    )

    service.set_enabled(True)
    print("enabled:", service.get_enabled())
    service.set_enabled(False)
    print("enabled:", service.get_enabled())
    print("property writes:", control.calls)
