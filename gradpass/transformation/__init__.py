# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
from gradpass.transformation.pass_pipeline import Modifies, Pass
from gradpass.transformation.gradient_pass import GradientPass
