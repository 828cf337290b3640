#error types raised by the disk layer and the initializer, the cli maps them to exit codes


class MinigitError(Exception):
    pass


#init errors carry the paths created before the failure so callers can still report them
class PathCreationError(MinigitError):
    def __init__(self, paths, created=()):
        self.paths = list(paths)
        self.created = list(created)
        super().__init__(f'could not create {", ".join(str(p) for p in self.paths)}')


class HeadWriteError(MinigitError):
    def __init__(self, path, created=()):
        self.path = path
        self.created = list(created)
        super().__init__(f'could not write HEAD at {path}')


#HEAD is empty, unreadable or points somewhere that is not a branch
class InvalidHeadError(MinigitError):
    pass


class ObjectWriteError(MinigitError):
    def __init__(self, oid):
        self.oid = oid
        super().__init__(f'could not write object {oid}')


class ObjectNotFoundError(MinigitError):
    def __init__(self, oid):
        self.oid = oid
        super().__init__(f'object {oid} not found')


#the object file is there but could not be read (permissions, not a regular file)
class ObjectReadError(MinigitError):
    def __init__(self, oid):
        self.oid = oid
        super().__init__(f'could not read object {oid}')
