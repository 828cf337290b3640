#local content-addressable object store, the bottom layer of a small version-control tool
__version__ = '1.0'
