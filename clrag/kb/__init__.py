"""Knowledge base access: vector math, query embedding and vector stores."""
