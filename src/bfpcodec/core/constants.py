"""Tile / Face 几何常量"""

TILE_HEIGHT = 32
TILE_WIDTH = 32
FACE_HEIGHT = 16
FACE_WIDTH = 16

TILE_SIZE = TILE_HEIGHT * TILE_WIDTH               # 1024
FACES_PER_TILE_ROW = TILE_HEIGHT // FACE_HEIGHT    # 2
FACES_PER_TILE_COL = TILE_WIDTH // FACE_WIDTH      # 2
FACES_PER_TILE = FACES_PER_TILE_ROW * FACES_PER_TILE_COL

BLOCK_SIZE = FACE_WIDTH                            # 一行 = 一个 block
ROWS_PER_TILE = FACES_PER_TILE * FACE_HEIGHT       # 64

EXPONENTS_PER_WORD = 4
EXP_WORDS_PER_TILE = ROWS_PER_TILE // EXPONENTS_PER_WORD  # 16

# IEEE-754 fp32 bit 域
FP32_SIGN_MASK = 0x80000000
FP32_EXP_MASK = 0x7F800000
FP32_MANTISSA_MASK = 0x007FFFFF
FP32_EXP_MANTISSA_MASK = 0x7FFFFFFF
FP32_HIDDEN_BIT = 1 << 23
FP32_BIAS = 127

# rebias: 8 位 bias-127 → 5 位 bias-15
REBIASED_BIAS = 15
REBIASED_EXP_MAX = 31

WORD_MASK = 0xFFFFFFFF

DEFAULT_WORKERS = 4
