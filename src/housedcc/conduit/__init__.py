"""
A conduit is a pair of byte streams to an endpoint: `input` carries the data coming back,
`output` the data sent. The endpoint here is the standard input/output of an external process.
"""
