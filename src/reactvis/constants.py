# --- Configuration Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1280, 720)
N_FFT = 2048
HOP_LENGTH = 512
N_BINS = N_FFT // 2  # Rfft bins minus the Nyquist bin
DEFAULT_NYQUIST_HZ = 22050.0
DB_FLOOR = -80  # Noise floor for dB normalisation
SILENCE_RMS = 1e-4  # Raw RMS below this counts as an inactive source

# Energy bands for the front end (Hz)
LOW_BAND = (20, 250)
MID_BAND = (250, 2600)

# Pitch estimation
PITCH_MIN_FREQ = 80.0
PITCH_MAX_FREQ = 2000.0
NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

# Onset detection
ONSET_SMOOTHING = 0.04  # 4% per tick, tracks ambient loudness not transients
ONSET_ENERGY_FLOOR = 0.005
REFRACTORY_TICKS = 8
BASE_BEAT_RATIO = 1.5
MIN_BEAT_RATIO = 1.05

# Intensity slider range
MIN_INTENSITY = 0.5
MAX_INTENSITY = 4.0

# Particle system settings
MAX_PARTICLES = 3000
PARTICLE_START_ALPHA = 255.0
MAX_SPAWN_COUNT = 5
DEFAULT_COLOR_INDEX = 0

# Spectrum views
SPECTRUM_BARS = 256  # Lower bins carry the musically interesting detail
CIRCULAR_BARS = 180
OPTICAL_GAP = 20  # Pixels between optical-flow lines and sample points
OPTICAL_MAX_DISPLACEMENT = 150
OPTICAL_MID_GATE = 100  # Mid level (0-255) above which noise glitches the lines
OPTICAL_NOISE_AMPLITUDE = 50

# Spectrogram gridlines
GRID_FREQUENCIES_HZ = (50, 200, 500, 1000, 2000, 5000, 10000)
GRID_LINE_ALPHA = 0.25

# Colour palettes (RGB)
PALETTES = {
    "bauhaus": ((109, 53, 138), (246, 217, 18), (252, 132, 5), (0, 0, 255), (200, 20, 20)),
    "neon": ((255, 0, 255), (0, 255, 255), (255, 255, 0), (50, 0, 100), (0, 255, 0)),
    "monochrome": ((0, 0, 0), (50, 50, 50), (100, 100, 100), (200, 200, 200), (20, 20, 20)),
    "pastel": ((255, 183, 178), (181, 234, 215), (226, 240, 203), (255, 218, 193), (224, 187, 228)),
}
DEFAULT_PALETTE = "bauhaus"
DARK_BACKGROUND = (0, 0, 0)
LIGHT_BACKGROUND = (255, 255, 255)
