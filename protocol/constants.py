"""Protocol constants for the benchmark log format."""

# Frame field sizes
MARKER_LENGTH = 1
ITERATION_LENGTH = 4
ITERATION_MASK = 0xFFFFFFFF  # 32-bit on the wire

# Header text
HEADER_INTRO = "Blackbox benchmark"
HEADER_SEPARATOR = ":"

# Header field names
KEY_FULL_INTERVAL = "I interval"
KEY_FULL_SIZE = "I size"
KEY_DELTA_SIZE = "P size"
KEY_LOOP_TIME = "Looptime"
KEY_BAUD_RATE = "Serial baud"
KEY_ITERATIONS = "Iterations"

HEADER_KEYS = (
    KEY_FULL_INTERVAL, KEY_FULL_SIZE, KEY_DELTA_SIZE,
    KEY_LOOP_TIME, KEY_BAUD_RATE, KEY_ITERATIONS,
)

# Iteration jump larger than this is reported as an anomaly
ITERATION_JUMP_THRESHOLD = 200
