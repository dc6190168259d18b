"""
The PiDCC protocol: DCC command encoding, line reassembly of the status stream and the
readiness state machine fed by the status lines.
"""
