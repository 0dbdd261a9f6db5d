"""Signal processing primitives: windows, FIR filters, spectra, resampling, demodulators."""
