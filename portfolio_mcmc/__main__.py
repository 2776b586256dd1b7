import sys

from portfolio_mcmc.cli import main

sys.exit(main())
