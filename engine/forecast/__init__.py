"""
Forecasting logic for metric windows, including least-squares trend fitting, moving-average smoothing and the combiner that blends both into a horizon forecast with confidence scoring.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


from engine.forecast.trend import TrendFit, fit_trend
from engine.forecast.smoothing import moving_average
from engine.forecast.combiner import Forecast, predict

__all__ = ["TrendFit", "fit_trend", "moving_average", "Forecast", "predict"]
