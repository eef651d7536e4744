import sys

from whisper_tflite.cli import main

if __name__ == "__main__":
    sys.exit(main())
