"""
System constants that should never change.

These are file names and conventions of the validation run, not user
preferences. User-configurable values belong in config.yaml instead.
"""

# Command-line defaults
DEFAULT_EXECUTABLE = "./ffmpeg.exe"
DEFAULT_OUTPUT_DIR = "./ffmpeg-test"

# Capture files written under the scratch directory
DEPENDENCIES_LOG = "dependencies.log"
SAMPLE_LOG = "sample-generation.log"
LISTING_LOG_TEMPLATE = "listing-{category}.log"

# Transient transcode artifacts, removed at the end of every run
SAMPLE_INPUT = "test_input.mp4"
CPU_OUTPUT = "test_output.mp4"
ACCEL_OUTPUT = "test_nvenc.mp4"
TRANSIENT_FILES = (SAMPLE_INPUT, CPU_OUTPUT, ACCEL_OUTPUT)

# objdump -p lines naming a linked library (PE and ELF respectively)
OBJDUMP_LIBRARY_MARKERS = ("DLL Name", "NEEDED")

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130
