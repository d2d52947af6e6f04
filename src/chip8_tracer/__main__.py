import sys

from chip8_tracer.app import main

sys.exit(main())
